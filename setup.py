"""
Setup script for grocery-scan.
"""
from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text() if readme_path.exists() else ""

setup(
    name="grocery-scan",
    version="0.1.0",
    description="Rank grocery product names from cloud vision annotations of a photo",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["grocery_scan", "grocery_scan.*"]),
    package_data={"grocery_scan": ["configs/*.yml"]},
    python_requires=">=3.9",
    install_requires=[
        "pyyaml>=6.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.0",
        "aiohttp>=3.9.0",
        "Pillow>=10.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "grocery-scan-replay=grocery_scan.replay:main",
        ]
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
