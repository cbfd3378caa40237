"""
publishing/ — Todo lo relacionado con publicar el update en GitHub.

Módulos:
- github_api.py → Cliente de la REST API (refs, blobs, trees, PRs, labels)
- messages.py   → Nombre del branch, mensaje del commit, título/body del PR
- git_ops.py    → Lectura del working tree local (archivos y file modes)
- publisher.py  → Flujo completo: branch → commit → PR → label → reviewers
"""
