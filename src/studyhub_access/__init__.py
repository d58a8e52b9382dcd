"""
STUDYHUB Access Core

Contrôle d'accès et quotas de la plateforme de partage de supports d'étude:
- Tokens d'authentification (émission, rotation, révocation)
- Limitation des connexions et quota quotidien de téléchargement
- Workflow de modération conditionnant la visibilité publique
"""

from .container import AccessCore, build_access_core

__version__ = "0.3.0"

__all__ = [
    "AccessCore",
    "build_access_core",
]
