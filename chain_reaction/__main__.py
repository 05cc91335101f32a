import sys

from chain_reaction.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
