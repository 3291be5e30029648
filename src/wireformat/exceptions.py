"""
序列化库异常体系
"""
from datetime import datetime
from typing import Dict, Any, Optional


class WireFormatError(Exception):
    """所有异常的基类"""
    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.context = context or {}
        self.timestamp = datetime.now()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，便于序列化"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# ==================== 配置和参数异常 ====================
class ConfigError(WireFormatError):
    """配置错误"""
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = {"config_key": config_key} if config_key else {}
        details.update(kwargs.pop("details", {}))
        super().__init__(message, code="CONFIG_ERROR", details=details, **kwargs)


class InvalidArgumentError(WireFormatError):
    """缺少或无效的调用参数"""
    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        details = {"argument": argument, "value": value}
        super().__init__(message, code="INVALID_ARGUMENT", details=details, **kwargs)


# ==================== 编解码异常 ====================
class CodecError(WireFormatError):
    """编解码错误基类"""
    pass


class NotSerializableError(CodecError):
    """类型未标记为可序列化"""
    def __init__(self, type_name: str, reason: Optional[str] = None, **kwargs):
        message = f"类型未标记为可序列化: {type_name}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            code="NOT_SERIALIZABLE",
            details={"type_name": type_name, "reason": reason},
            **kwargs
        )


class TypeMismatchError(CodecError):
    """反序列化结果与期望类型不兼容"""
    def __init__(self, expected: str, actual: str, **kwargs):
        super().__init__(
            message=f"类型不匹配: 期望 {expected}, 实际 {actual}",
            code="TYPE_MISMATCH",
            details={"expected": expected, "actual": actual},
            **kwargs
        )


class MalformedInputError(CodecError):
    """输入内容无法按目标结构解析"""
    def __init__(
        self,
        message: str,
        wire_format: Optional[str] = None,
        target_type: Optional[str] = None,
        **kwargs
    ):
        details = {"format": wire_format, "target_type": target_type}
        prefix = f"[{wire_format}] " if wire_format else ""
        super().__init__(
            message=f"{prefix}输入格式错误: {message}",
            code="MALFORMED_INPUT",
            details=details,
            **kwargs
        )
