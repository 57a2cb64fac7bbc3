"""
业务异常定义
服务层抛出，由 main.py 中注册的异常处理器统一转换为 HTTP 响应
"""


class ServiceError(Exception):
    """业务异常基类"""

    status_code = 400
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.kind}


class NotFoundError(ServiceError):
    """实体不存在"""
    status_code = 404
    kind = "not_found"


class InvalidArgumentError(ServiceError):
    """参数非法（如开始时间不早于结束时间、未知枚举值）"""
    status_code = 400
    kind = "invalid_argument"


class InvalidStateError(ServiceError):
    """当前状态下不允许该操作"""
    status_code = 400
    kind = "invalid_state"


class NotAuthorizedError(InvalidStateError):
    """无权操作他人的资源（如编辑他人评论）"""
    status_code = 403
    kind = "not_authorized"


class ConflictError(ServiceError):
    """预订时间段冲突"""
    status_code = 409
    kind = "conflict"


class AuthenticationError(ServiceError):
    """认证失败"""
    status_code = 401
    kind = "unauthorized"
