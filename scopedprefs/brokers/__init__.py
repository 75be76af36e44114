"""
Messaging broker contracts consumed by the surrounding bot framework.
"""

from .base import Broker, BrokerConfig, Evt, IdTranslator, supports_id_translation
from .loopback import LoopbackBroker, LoopbackConfig
