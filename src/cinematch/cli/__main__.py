"""Allow ``python -m cinematch.cli``."""

from .main import main

main()
