"""Lanzador desde un checkout (`python main.py fetch minecraft/face Notch`).

Instalado con `pip install -e .` el comando es `avatar-api`; este archivo solo
añade `src/` al path para usar la misma CLI sin instalar el paquete.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
