"""
gradlew-update — Propone updates del Gradle Wrapper como Pull Requests.

Este paquete contiene:
- publishing/ → Cliente de GitHub, textos del PR y flujo de publicación
- utils/      → Logger y validadores compartidos
- config.py   → Carga de configuración (config.yaml, .env, inputs del action)
- cli.py      → Comandos publish, check y config

Uso:
    python -m gradlew_update publish --target-version 7.0 --source-version 6.8
    python -m gradlew_update check --target-version 7.0
"""

__version__ = "1.0.0"
