import os.path
import re

from setuptools import find_packages, setup

try:
    # Import all script providers so that ENTRYPOINTS gets populated.
    from svclib.scripts import service  # noqa: F401
    from svclib.scripts.utils import ENTRYPOINTS
except ImportError:
    # Avoid chicken-and-egg dependency requirements during initial installation.
    # This means you need to re-run setup in order to gain script entrypoints.
    ENTRYPOINTS = []


HERE = os.path.abspath(os.path.dirname(__file__))

README = os.path.join(HERE, "README.rst")


def version():
    with open(os.path.join(HERE, "svclib", "__init__.py")) as init:
        return re.search(r'^__version__ = "([^"]+)"', init.read(), re.MULTILINE).group(1)


setup(name="svclib",
      version=version(),
      description="Start operating system services as a controlled deployment pipeline step.",
      long_description=open(README).read(),
      long_description_content_type="text/x-rst",
      author="svclib maintainers",
      platforms=["Any"],
      python_requires=">=3.8",
      install_requires=["docopt", "jinja2"],
      packages=find_packages(exclude=["tests", "tests.*"]),
      package_data={"svclib.describe": ["templates/*.j2"]},
      entry_points={"console_scripts": ENTRYPOINTS})
