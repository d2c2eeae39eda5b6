from .errors import grpc_status_to_business_code, rpc_error_to_exception

__all__ = ["grpc_status_to_business_code", "rpc_error_to_exception"]
