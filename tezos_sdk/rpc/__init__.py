from .http import RpcClient  # noqa: F401
