import os
from setuptools import find_packages, setup

this = os.path.dirname(os.path.realpath(__file__))


def read(name):
    with open(os.path.join(this, name)) as f:
        return f.read()


VERSION = "1.0.0"


setup(
    name="perf-switcher",
    version=VERSION,
    description="Quiet/Balanced/Performance profile switcher for asusd",
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    url="https://github.com/perf-switcher/perf-switcher",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=read("requirements.txt").splitlines(),
    extras_require={"test": ["pytest"]},
    python_requires=">=3.10",
    include_package_data=True,
    zip_safe=True,
    license="GPLv3",
    keywords="linux asus asusd asusctl platform profile power tray",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Operating System :: POSIX :: Linux",
        "Environment :: X11 Applications :: GTK",
        "Natural Language :: English",
    ],
    entry_points={
        "console_scripts": ["perf-switcher=perf_switcher.bin.perf_switcher:main"],
    },
)
