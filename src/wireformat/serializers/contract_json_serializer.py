"""
契约式JSON序列化器
成员名大小写敏感，空值成员一律省略，键顺序与成员声明顺序一致
"""
import logging
from typing import Any, List, Optional, Type

from ..config.settings import get_settings
from ..config.validator import ConfigValidator
from ..core.inspector import MemberDescriptor
from .base import JSONSerializerBase, is_blank

logger = logging.getLogger(__name__)


class ContractJSONSerializer(JSONSerializerBase):
    """契约式JSON序列化器"""

    format_name = "json"
    case_sensitive = True

    def __init__(self, encoding: Optional[str] = None):
        """
        初始化契约式JSON序列化器

        Args:
            encoding: 文本编码，默认使用配置中的 default_encoding
        """
        super().__init__()
        self.encoding = ConfigValidator().resolve_encoding(
            encoding, default=get_settings().default_encoding
        )

    def member_items(self, descriptors: List[MemberDescriptor]) -> List[tuple]:
        """使用声明名，忽略注解，省略空值"""
        return [(d.name, d.value) for d in descriptors if d.value is not None]

    def serialize(self, obj: Any) -> Optional[str]:
        """
        序列化为JSON字符串

        JSON内容先按UTF-8写出，再用配置的编码读回
        """
        if obj is None:
            return None

        payload = self.dumps(self.serialize_to_dict(obj)).encode('utf-8')
        text = payload.decode(self.encoding, errors='replace')
        logger.debug(f"契约式JSON序列化完成: {type(obj).__name__}, {len(text)}个字符")
        return text

    def deserialize(self, data: Optional[str], return_type: Optional[Type] = None) -> Any:
        """
        从JSON字符串反序列化（成员名大小写敏感）

        Args:
            data: JSON字符串
            return_type: 目标类型，None时返回解析后的原始结构

        Returns:
            目标类型实例，输入为空时返回None
        """
        if is_blank(data):
            return None

        payload = data if isinstance(data, (bytes, bytearray)) else data.encode(self.encoding, errors='replace')
        result = self.bind(self.loads(payload), return_type)
        logger.debug(f"契约式JSON反序列化完成: {getattr(return_type, '__name__', return_type)}")
        return result
