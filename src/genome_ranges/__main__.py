import sys

from genome_ranges.scripts.range_walkthrough import main


if __name__ == '__main__':
    sys.exit(main())
