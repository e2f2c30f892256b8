# This program is placed into the public domain.

"""
Gets the current version number.
If in a git repository with a version tag, it is the current git tag.
Otherwise it is the one contained in the PKG-INFO file, falling back to
the ``__version__`` declared by the riakrest package.

To use this script, simply import it in your setup.py file
and use the results of get_version() as your package version::

    from version import get_version

    setup(
        version=get_version()
    )
"""

import re

from os.path import dirname, isdir, isfile, join
from subprocess import CalledProcessError, check_output

version_re = re.compile('^Version: (.+)$', re.M)
package_version_re = re.compile(r"^__version__ = ['\"]([^'\"]+)['\"]", re.M)

__all__ = ['get_version']


def _git_version(d):
    cmd = 'git describe --tags --match [0-9]*'.split()
    try:
        version = check_output(cmd, cwd=d).decode().strip()
    except (CalledProcessError, OSError):
        return None

    # PEP 440 compatibility
    if '-' in version:
        version = '.post'.join(version.split('-')[:2])
    return version


def get_version():
    d = dirname(__file__) or '.'

    if isdir(join(d, '.git')):
        version = _git_version(d)
        if version:
            return version

    pkg_info = join(d, 'PKG-INFO')
    if isfile(pkg_info):
        with open(pkg_info) as f:
            return version_re.search(f.read()).group(1)

    with open(join(d, 'riakrest', '__init__.py')) as f:
        return package_version_re.search(f.read()).group(1)


if __name__ == '__main__':
    print(get_version())
