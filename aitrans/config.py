#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
aitrans 配置模块

这个模块包含了项目的配置信息和常量:
1. 语言与模型列表
2. 默认偏好设置
3. HTML 标签分类
4. Gemini 接口地址
5. 翻译历史设置
"""

# 支持的语言，'auto' 表示自动检测源语言
LANGUAGES = [
    ("auto", "Detect language"),
    ("en", "English"),
    ("vi", "Vietnamese"),
    ("ja", "Japanese"),
    ("ko", "Korean"),
    ("zh", "Chinese"),
    ("fr", "French"),
    ("de", "German"),
    ("es", "Spanish"),
    ("pt", "Portuguese"),
]

# 文本翻译可用的模型（图像生成与实时流模型不在此列）
MODELS = [
    ("gemini-2.5-pro", "Gemini 2.5 Pro"),
    ("gemini-2.5-flash", "Gemini 2.5 Flash"),
    ("gemini-2.5-flash-lite", "Gemini 2.5 Flash-Lite"),
    ("gemini-2.0-flash", "Gemini 2.0 Flash"),
    ("gemini-2.0-flash-lite", "Gemini 2.0 Flash-Lite"),
]
MODEL_IDS = [model_id for model_id, _ in MODELS]

TRANSLATION_SERVICE_OPTIONS = [
    "gemini",
]

# 默认偏好
DEFAULT_SOURCE_LANGUAGE = "auto"
DEFAULT_TARGET_LANGUAGE = "vi"
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_SERVICE = "gemini"

# 从环境变量读取API密钥
API_KEY_ENV_VAR = "GEMINI_API_KEY"

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GEMINI_HEADERS = {
    "Content-Type": "application/json",
}

# 不翻译的HTML标签，其中的文本原样保留
HTML_TAGS_NO_TRANSLATE = frozenset(["code", "pre", "script", "style"])
# 标记为不翻译的class
NO_TRANSLATE_CLASS = "notranslate"

# 被判定为HTML输入的文件扩展名
HTML_FILE_EXTENSIONS = (".html", ".htm", ".xhtml")

# 翻译历史保留条数
HISTORY_LIMIT = 10


def format_language(code):
    """返回语言代码对应的显示名称

    Args:
        code: 语言代码

    Returns:
        str: 显示名称，未知代码原样返回
    """
    for lang_code, name in LANGUAGES:
        if lang_code == code:
            return name
    return code


def swap_languages(source_language, target_language):
    """交换源语言和目标语言

    目标语言不能是 'auto'，所以当源语言为 'auto' 时目标语言回落到默认值；
    同理，目标语言为 'auto' 时源语言回落到英语。

    Returns:
        tuple: (新的源语言, 新的目标语言)
    """
    new_source = "en" if target_language == "auto" else target_language
    new_target = DEFAULT_TARGET_LANGUAGE if source_language == "auto" else source_language
    return new_source, new_target
