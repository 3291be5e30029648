"""
pytest配置文件
用于设置测试环境和共享fixtures
"""
import sys
import os

import pytest

# 将src目录添加到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wireformat.config.settings import SerializerSettings, get_settings, use_settings


@pytest.fixture
def settings_scope():
    """在测试内替换全局配置，结束后恢复"""
    previous = get_settings()

    def apply(**overrides):
        settings = SerializerSettings.from_dict({**previous.to_dict(), **overrides})
        use_settings(settings)
        return settings

    yield apply
    use_settings(previous)
