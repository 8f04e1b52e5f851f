# SPDX-License-Identifier: AGPL-3.0-or-later
# pylint: disable=missing-module-docstring

# hint: setup.py reads these values without importing the package
VERSION_STRING: str = "1.0.0"
VERSION_TAG: str = "1.0.0"
