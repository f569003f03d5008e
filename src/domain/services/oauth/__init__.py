from .orchestrator import LoginResult, OAuthOrchestrator
from .reconciliation import IdentityReconciler

__all__ = ["IdentityReconciler", "LoginResult", "OAuthOrchestrator"]
