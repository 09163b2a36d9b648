from app.flows.base import Flow, FlowError, get_flow

__all__ = ['Flow', 'FlowError', 'get_flow']
