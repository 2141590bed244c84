#!/usr/bin/env python

from setuptools import setup

setup(
    name="esmapper",
    version="0.1.0",
    description="Create elasticsearch mappings from annotated python classes",
    packages=["esmapper"],
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.10",
    keywords=["elasticsearch", "mapping"],
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Topic :: Database",
    ],
    install_requires=[
        "elasticsearch~=8.6",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
    ],
    extras_require={
        'dev': [
            'pytest',
            'mypy',
            'flake8',
        ]
    },
    entry_points={
        'console_scripts': [
            'esmapper = esmapper.__main__:main'
        ]
    },
)
