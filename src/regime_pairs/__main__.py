import sys

from regime_pairs.cli import main

if __name__ == "__main__":
    sys.exit(main())
