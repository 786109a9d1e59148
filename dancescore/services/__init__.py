from .srv_scoring import ScoringService

__all__ = ['ScoringService']
