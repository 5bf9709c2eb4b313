from setuptools import setup, find_packages


setup(
    name="microrom",
    version="0.1.0",
    author="ADCL",
    description="Microcode ROM image builder for the fs16 discrete-logic CPU",
    license="0-clause BSD License",
    python_requires="~=3.9",
    setup_requires=[
        "setuptools",
    ],
    install_requires=[
        "fx2>=0.9",
        "crcmod",
    ],
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={
        "console_scripts": [
            "microrom = microrom.cli:run_main"
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved', # ' :: 0-clause BSD License', (not in PyPI)
        'Topic :: Software Development :: Code Generators',
        'Topic :: System :: Hardware',
    ],
)
