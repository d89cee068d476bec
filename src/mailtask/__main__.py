# =============================================================================
# mailtask Entry Point for `python -m mailtask`
# =============================================================================
# This module allows mailtask to be run as a Python module:
#
#   python -m mailtask params.toml --workspace ./project
#
# This is equivalent to running the 'mailtask' command after installation.
# The exit status is the one main() returns: 0 on success, 1 on failure.
# =============================================================================

import sys

from mailtask.app import main

if __name__ == "__main__":
    sys.exit(main())
