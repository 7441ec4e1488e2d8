from setuptools import setup, find_packages

setup(
    name="prettier_diff",
    version="0.1.0",
    packages=find_packages(include=["prettier_diff", "prettier_diff.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "tqdm>=4.60",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "prettier-diff=prettier_diff.cli:main",
        ],
    },
    description="Run Prettier on changed files, or only on changed lines.",
)
