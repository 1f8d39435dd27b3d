# -*- coding: utf-8 -*-

from .auto_translation import auto_translation_command
from .message_handler import handle_message
from .translation import translate_command, compose_command

__all__ = ["auto_translation_command", "handle_message", "translate_command", "compose_command"]
