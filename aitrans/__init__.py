#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
aitrans Module

Translates HTML fragments with a language model while preserving their structure.
"""

# Expose the core translation function as the primary API
from .core import run_translation

# Lower-level components for callers that drive the pipeline themselves
from .html_processor import HTMLProcessor, TextUnit, extract, reassemble
from .markdown_renderer import render_markdown
from .sanitizer import DEFAULT_POLICY, SanitizationPolicy, sanitize
from .translation_services import TranslationService, get_translation_service

__version__ = "0.1.0"
