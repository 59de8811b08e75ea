from .ws_private import VersifiPrivateWebsocket, ExecutionReportHandler

__all__ = ['VersifiPrivateWebsocket', 'ExecutionReportHandler']
