from __future__ import annotations

from setuptools import find_namespace_packages, setup

setup(
    name="mesh-embedding",
    version="0.1.0",
    description="Energy-based deformation of half-edge meshes",
    python_requires=">=3.9",
    packages=find_namespace_packages(
        include=["core*", "geometry*", "modules*", "runtime*", "mesh_embedding*"]
    ),
    py_modules=["main"],
    install_requires=["numpy", "pyyaml"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["mesh-embedding=main:main"]},
)
