"""Package entry point for ``python -m stf_converter``.

WHY: Users run the converter as ``python -m stf_converter export strings.stf``
without installing the console script. Python's ``-m`` flag looks for
``__main__.py`` inside the package and executes it.

HOW: Delegates straight to the CLI's main() and exits with its code.
"""

import sys

from stf_converter.cli import main

if __name__ == "__main__":
    sys.exit(main())
