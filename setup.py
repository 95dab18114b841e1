"""Setup configuration for huedini package."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="huedini",
    version="0.1.0",
    author="Huedini Team",
    description="Detect legend color swatches in infographic images",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["huedini", "huedini.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.8",
    install_requires=[
        "opencv-python>=4.8.0",
        "numpy>=1.24.0",
        "Pillow>=9.5.0",  # Image loading with alpha compositing
        "tqdm>=4.65.0",  # For progress bars
        "omegaconf>=2.3.0",  # YAML config files and overrides
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "scikit-image>=0.21.0",  # PSNR checks in denoise tests
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "huedini=huedini.cli:main",
        ],
    },
)
