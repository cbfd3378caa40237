"""
__main__.py — Permite ejecutar gradlew-update como módulo.

    python -m gradlew_update publish --target-version 7.0
"""

from gradlew_update.cli import main

if __name__ == "__main__":
    main()
