# setup.py
from setuptools import setup, find_packages

setup(
    name="kestrel",
    version="0.3.0",
    description="A small expression-oriented scripting language with a Pratt parser and a tree-walking evaluator",
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    # The standard library is Kestrel source evaluated into every session
    package_data={"kestrel": ["prelude/std/*.ks"]},
    include_package_data=True,
    install_requires=[],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    entry_points={
        "console_scripts": ["kestrel=kestrel.__main__:main"],
    },
    zip_safe=False,
)
