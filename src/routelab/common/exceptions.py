"""
路线服务异常定义

每个异常携带 ``error_code`` 与 ``status_code``，供外部 HTTP 层直接映射响应。
"""

from typing import Any, Optional


class RouteLabError(Exception):
    status_code = 500

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(RouteLabError):
    """缺少必填字段或字段非法（400）"""
    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            error_code="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class NotFoundError(RouteLabError):
    status_code = 404

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            error_code=f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found: {resource_id}",
            details={"resource": resource, "id": resource_id},
        )
        self.resource = resource
        self.resource_id = resource_id


class NoPathFoundError(RouteLabError):
    """服务商返回成功，但没有可用路径（422）"""
    status_code = 422

    def __init__(self, message: str = "服务商返回成功，但未找到可规划的路径。请检查起点、终点是否可达，或起终点是否重叠。"):
        super().__init__(error_code="NO_PATH_FOUND", message=message)


class ProviderError(RouteLabError):
    """路线服务商调用失败（502），保留服务商自身的错误码与信息"""
    status_code = 502

    def __init__(self, code: Optional[str], message: str):
        super().__init__(
            error_code="PROVIDER_ERROR",
            message=f"高德API错误: {message or '未知错误'}",
            details={"provider_code": code, "provider_message": message},
        )
        self.provider_code = code
        self.provider_message = message


class StoreUnavailableError(RouteLabError):
    status_code = 503

    def __init__(self, message: str = "数据库未初始化或连接已关闭"):
        super().__init__(error_code="STORE_UNAVAILABLE", message=message)
