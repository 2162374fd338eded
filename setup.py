from setuptools import setup, find_packages

setup(
    name="precision-regression-framework",
    version="0.1.0",
    description="Cross-configuration top-3 regression check for classifier inference engines",
    author="Research Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "torch>=1.10.0",
        "numpy>=1.20.0",
    ],
    extras_require={
        "ncnn": ["ncnn>=1.0.20230517"],
        "test": ["pytest>=6.0.0"],
    },
    entry_points={
        "console_scripts": [
            "precision-regression=precision_regression.cli:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
