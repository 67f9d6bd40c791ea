from setuptools import setup, find_packages

setup(
    name="devtree-usb",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pandas",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.1",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "devtree-usb=devtree_usb.__main__:main",
        ],
    },
    python_requires=">=3.10",
)
