"""Module entrypoint for ``python -m zymproc``."""

from zymproc.cli import main

raise SystemExit(main())
