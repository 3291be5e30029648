"""
序列化门面
为二进制、XML、契约式JSON和脚本风格JSON提供统一的静态入口，
每次调用都创建新的编解码器，不保留任何状态
"""

import enum
import logging
from typing import Any, Dict, Optional, Type, Union

from .config.settings import SerializerSettings, get_settings, use_settings
from .exceptions import InvalidArgumentError
from .serializers.base import JsonValue
from .serializers.binary_serializer import BinarySerializer
from .serializers.xml_serializer import XMLSerializer
from .serializers.contract_json_serializer import ContractJSONSerializer
from .serializers.script_json_serializer import ScriptJSONSerializer

logger = logging.getLogger(__name__)


class Format(enum.Enum):
    """传输格式"""
    BINARY = "binary"
    XML = "xml"
    JSON = "json"
    JAVASCRIPT = "javascript"


# 各格式允许的调用选项
_SERIALIZE_OPTIONS = {
    Format.BINARY: set(),
    Format.XML: {"indent", "encoding"},
    Format.JSON: {"encoding"},
    Format.JAVASCRIPT: {"ignore_nulls"},
}

_DESERIALIZE_OPTIONS = {
    Format.BINARY: set(),
    Format.XML: {"encoding"},
    Format.JSON: {"encoding"},
    Format.JAVASCRIPT: set(),
}


def _resolve_format(fmt: Union[Format, str]) -> Format:
    if isinstance(fmt, Format):
        return fmt
    try:
        return Format(str(fmt).lower())
    except ValueError as e:
        raise InvalidArgumentError(
            f"不支持的格式: {fmt}",
            argument="fmt",
            value=fmt
        ) from e


def _check_options(fmt: Format, options: Dict[str, Any], allowed: Dict[Format, set]) -> None:
    unknown = set(options) - allowed[fmt]
    if unknown:
        raise InvalidArgumentError(
            f"{fmt.value}格式不支持的选项: {', '.join(sorted(unknown))}",
            argument="options",
            value=sorted(unknown)
        )


class Serializer:
    """
    序列化门面

    示例:
        >>> text = Serializer.javascript_serialize(item)
        >>> copy = Serializer.javascript_deserialize(text, Item)
    """

    # ========== 配置 ==========

    @staticmethod
    def configure(config: Optional[Union[Dict[str, Any], SerializerSettings]] = None) -> SerializerSettings:
        """
        替换全局默认配置

        Args:
            config: 配置字典或配置对象，None时恢复默认配置

        Returns:
            生效的配置
        """
        if isinstance(config, SerializerSettings):
            settings = config
        else:
            settings = SerializerSettings.from_dict(config) if config else SerializerSettings()

        use_settings(settings)
        if settings.enable_logging:
            Serializer._setup_logging(settings)
        logger.info(f"序列化配置已更新: encoding={settings.default_encoding}, ignore_nulls={settings.ignore_nulls}")
        return settings

    @staticmethod
    def _setup_logging(settings: SerializerSettings):
        """配置日志系统"""
        logging.basicConfig(
            level=getattr(logging, settings.log_level),
            format=settings.log_format,
            handlers=[logging.StreamHandler()]
        )

    # ========== 二进制 ==========

    @staticmethod
    def binary_serialize(value: Any) -> Optional[bytes]:
        """序列化为字节流，None返回None"""
        return BinarySerializer().serialize(value)

    @staticmethod
    def binary_deserialize(source: Optional[bytes], return_type: Optional[Type] = None) -> Any:
        """从字节流还原对象，可选检查结果类型"""
        return BinarySerializer().deserialize(source, return_type)

    # ========== XML ==========

    @staticmethod
    def xml_serialize(value: Any, indent: bool = False, encoding: Optional[str] = None) -> Optional[str]:
        """序列化为XML文档"""
        return XMLSerializer(indent=indent, encoding=encoding).serialize(value)

    @staticmethod
    def xml_deserialize(source: Optional[str], return_type: Type, encoding: Optional[str] = None) -> Any:
        """从XML文档还原为指定类型"""
        return XMLSerializer(encoding=encoding).deserialize(source, return_type)

    # ========== JSON ==========

    @staticmethod
    def json_serialize(value: Any, encoding: Optional[str] = None) -> Optional[str]:
        """契约式JSON序列化（空值成员省略）"""
        return ContractJSONSerializer(encoding=encoding).serialize(value)

    @staticmethod
    def json_deserialize(source: Optional[str], return_type: Type, encoding: Optional[str] = None) -> Any:
        """契约式JSON反序列化（成员名大小写敏感）"""
        return ContractJSONSerializer(encoding=encoding).deserialize(source, return_type)

    @staticmethod
    def javascript_serialize(value: Any, ignore_nulls: Optional[bool] = None) -> Optional[str]:
        """脚本风格JSON序列化（应用忽略/重命名注解）"""
        return ScriptJSONSerializer(ignore_nulls=ignore_nulls).serialize(value)

    @staticmethod
    def javascript_deserialize(source: Optional[str], return_type: Type) -> Any:
        """脚本风格JSON反序列化（成员名大小写不敏感）"""
        return ScriptJSONSerializer().deserialize(source, return_type)

    @staticmethod
    def dynamic_deserialize(source: Optional[str]) -> JsonValue:
        """解析为动态结构（嵌套的dict/list）"""
        return ScriptJSONSerializer().deserialize_dynamic(source)

    # ========== 按格式分派 ==========

    @staticmethod
    def serialize(value: Any, fmt: Union[Format, str], **options) -> Union[str, bytes, None]:
        """
        按格式序列化

        Args:
            value: 待序列化的值
            fmt: 传输格式（Format或其名称）
            **options: 格式选项（indent / encoding / ignore_nulls）

        Raises:
            InvalidArgumentError: 格式或选项无效
        """
        fmt = _resolve_format(fmt)
        _check_options(fmt, options, _SERIALIZE_OPTIONS)
        logger.debug(f"按格式序列化: {fmt.value}")

        if fmt is Format.BINARY:
            return Serializer.binary_serialize(value)
        if fmt is Format.XML:
            return Serializer.xml_serialize(value, **options)
        if fmt is Format.JSON:
            return Serializer.json_serialize(value, **options)
        return Serializer.javascript_serialize(value, **options)

    @staticmethod
    def deserialize(
            source: Union[str, bytes, None],
            fmt: Union[Format, str],
            return_type: Optional[Type] = None,
            **options
    ) -> Any:
        """
        按格式反序列化

        JSON两种格式在 return_type 为None时返回动态结构；XML必须指定目标类型

        Raises:
            InvalidArgumentError: 格式或选项无效，或XML未指定目标类型
        """
        fmt = _resolve_format(fmt)
        _check_options(fmt, options, _DESERIALIZE_OPTIONS)
        logger.debug(f"按格式反序列化: {fmt.value}")

        if fmt is Format.BINARY:
            return Serializer.binary_deserialize(source, return_type)
        if fmt is Format.XML:
            return Serializer.xml_deserialize(source, return_type, **options)
        if fmt is Format.JSON:
            return Serializer.json_deserialize(source, return_type, **options)
        if return_type is None:
            return Serializer.dynamic_deserialize(source)
        return Serializer.javascript_deserialize(source, return_type)

    @staticmethod
    def current_settings() -> SerializerSettings:
        """当前生效的配置"""
        return get_settings()
