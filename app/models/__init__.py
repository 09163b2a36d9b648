from app.models.user import User
from app.models.subscription import Subscription
from app.models.analysis_result import AnalysisResult
from app.models.processed_session import ProcessedSession

__all__ = ['User', 'Subscription', 'AnalysisResult', 'ProcessedSession']
