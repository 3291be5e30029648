"""
wireformat 基本使用示例
"""
import sys
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

# 添加src到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wireformat import Serializer, Format, ignore_member, rename_member, serializable
from wireformat.utils import change_time_zone, to_iso8601_string, to_unix_time


@serializable
@ignore_member("Password")
@rename_member("UserName", "login")
@dataclass
class Account:
    UserName: str = ""
    Password: Optional[str] = None
    CreatedAt: Optional[datetime] = None


def main():
    """主函数"""
    print("=" * 60)
    print("wireformat - 基本使用示例")
    print("=" * 60)

    Serializer.configure({"log_level": "INFO", "enable_logging": True})
    account = Account("ana", "s3cret", datetime(2015, 3, 10, 14, 30))

    # 1. 二进制
    print("\n1. 二进制序列化...")
    data = Serializer.binary_serialize(account)
    print(f"   大小: {len(data)} 字节")
    print(f"   还原: {Serializer.binary_deserialize(data, Account)}")

    # 2. XML
    print("\n2. XML序列化...")
    xml = Serializer.xml_serialize(account, indent=True)
    print(xml)
    print(f"   还原: {Serializer.xml_deserialize(xml, Account)}")

    # 3. 两种JSON
    print("\n3. JSON序列化...")
    print(f"   契约式: {Serializer.json_serialize(account)}")
    print(f"   脚本风格: {Serializer.javascript_serialize(account)}")
    print(f"   动态解析: {Serializer.dynamic_deserialize(Serializer.javascript_serialize(account))}")

    # 4. 按格式分派
    print("\n4. 按格式分派...")
    for fmt in Format:
        payload = Serializer.serialize(account, fmt)
        print(f"   {fmt.value}: {type(payload).__name__}, {len(payload)}")

    # 5. 日期辅助函数
    print("\n5. 日期辅助函数...")
    local = change_time_zone(account.CreatedAt, "America/Sao_Paulo", "Asia/Shanghai")
    print(f"   上海时间: {to_iso8601_string(local)}")
    print(f"   Unix时间: {to_unix_time(local)}")

    print("\n✅ 示例运行完成")


if __name__ == "__main__":
    main()
