"""Allow ``python -m digit_gen``."""

from digit_gen.cli import main

main()
