from setuptools import setup, find_packages


def readme():
    with open("README.md") as f:
        import re

        long_desc = f.read()
        # strip out the raw html images
        long_desc = re.sub(r"\.\. raw::[\S\s]*?>\n\n", "", long_desc)
        return long_desc


setup(
    name="mpskit",
    version="0.1.0",
    description="Matrix product state bond updates, overlaps and sums.",
    long_description=readme(),
    long_description_content_type="text/markdown",
    license="Apache",
    packages=find_packages(exclude=["deps", "tests*"]),
    install_requires=[
        "autoray>=0.6.7",
        "cotengra>=0.5.6",
        "cytoolz>=0.8.0",
        "numba>=0.39",
        "numpy>=1.17",
        "psutil>=4.3.1",
        "scipy>=1.0.0",
        "tqdm>=4",
    ],
    extras_require={
        "tests": [
            "coverage",
            "pytest",
            "pytest-cov",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    keywords="quantum physics tensor networks matrix product states mps",
)
