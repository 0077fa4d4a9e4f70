"""
Feature flags for the scan orchestrator.

Set via environment variables or modify defaults here.

Usage:
    from grocery_scan.feature_flags import FLAGS

    if FLAGS.verbose_scan:
        ...
"""
import os


class FeatureFlags:
    """
    Feature flags for the scan orchestrator.

    Example: export SCAN_VERBOSE=true
    """

    # Print one [SCAN] telemetry line per scan_once() call
    verbose_scan: bool = os.getenv("SCAN_VERBOSE", "false").lower() == "true"

    # Also compute the legacy single-label pick alongside the ranked list
    legacy_best_label: bool = os.getenv("SCAN_LEGACY_BEST_LABEL", "true").lower() == "true"

    # Match ranked candidates against the grocery list when one is supplied
    grocery_matching: bool = os.getenv("SCAN_GROCERY_MATCHING", "true").lower() == "true"

    @classmethod
    def print_status(cls):
        """Print current flag status for debugging."""
        print("\n[FLAGS] ===== Feature Flags Status =====")
        print(f"[FLAGS]   verbose_scan: {cls.verbose_scan}")
        print(f"[FLAGS]   legacy_best_label: {cls.legacy_best_label}")
        print(f"[FLAGS]   grocery_matching: {cls.grocery_matching}")
        print(f"[FLAGS] =====================================\n")


# Global instance
FLAGS = FeatureFlags()
