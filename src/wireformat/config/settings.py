"""
序列化库配置设置
"""
import pickle
from typing import Dict, Any
from dataclasses import dataclass, asdict

from ..exceptions import ConfigError
from .validator import ConfigValidator


@dataclass
class SerializerSettings:
    """
    序列化配置类
    各编解码器在调用方未指定参数时使用这里的默认值
    """

    # 编码配置
    default_encoding: str = "utf-8"

    # XML格式配置（每级缩进1个制表符）
    xml_indent_char: str = "\t"
    xml_indent_size: int = 1
    xml_newline: str = "\r\n"

    # JSON（脚本风格）配置
    ignore_nulls: bool = True

    # 二进制配置
    binary_protocol: int = pickle.HIGHEST_PROTOCOL

    # 日志配置
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_logging: bool = False

    def __post_init__(self):
        """初始化后处理，验证配置"""
        self._validate_settings()

    def _validate_settings(self):
        """验证配置值"""
        ConfigValidator().validate_settings(self.to_dict())
        self.log_level = self.log_level.upper()

        if not 2 <= self.binary_protocol <= pickle.HIGHEST_PROTOCOL:
            raise ConfigError(
                message=f"pickle协议版本必须在2-{pickle.HIGHEST_PROTOCOL}之间: {self.binary_protocol}",
                config_key="binary_protocol",
                details={"valid_range": f"2-{pickle.HIGHEST_PROTOCOL}"}
            )

    @property
    def xml_indent(self) -> str:
        """单级缩进字符串"""
        return self.xml_indent_char * self.xml_indent_size

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'SerializerSettings':
        """从字典创建配置"""
        # 过滤无效的配置键
        valid_keys = {field.name for field in cls.__dataclass_fields__.values()}
        filtered_config = {k: v for k, v in config_dict.items() if k in valid_keys}

        return cls(**filtered_config)


# 当前生效的配置
_current_settings = SerializerSettings()


def get_settings() -> SerializerSettings:
    """获取当前生效的配置"""
    return _current_settings


def use_settings(settings: SerializerSettings) -> SerializerSettings:
    """替换当前生效的配置，返回之前的配置"""
    global _current_settings
    if not isinstance(settings, SerializerSettings):
        raise ConfigError(f"配置对象类型无效: {type(settings).__name__}")
    previous = _current_settings
    _current_settings = settings
    return previous
