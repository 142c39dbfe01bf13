#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
aitrans CLI Entry Point

Handles command-line argument parsing and initiates the translation process.
"""

import os
import sys
import argparse
# 从 .core 导入核心翻译函数
from .core import run_translation
# 从 .config 导入命令行选项所需的常量
from .config import (
    API_KEY_ENV_VAR,
    DEFAULT_MODEL,
    DEFAULT_SERVICE,
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    LANGUAGES,
    MODEL_IDS,
    TRANSLATION_SERVICE_OPTIONS,
    swap_languages,
)
from .history import TranslationHistory, format_entry

# 翻译工具命令行选项
def add_translation_options(parser):
    """添加aitrans的通用命令行选项

    Args:
        parser: argparse.ArgumentParser 实例
    """
    parser.add_argument("-i", "--input-file", dest="input_file", help="要翻译的HTML或纯文本文件")
    parser.add_argument("-o", "--output-file", dest="output_file", help="输出的HTML文件路径")
    parser.add_argument("-s", "--service", dest="translation_service",
                        choices=TRANSLATION_SERVICE_OPTIONS, default=DEFAULT_SERVICE,
                        help=f"翻译服务类型，支持: {', '.join(TRANSLATION_SERVICE_OPTIONS)}")
    parser.add_argument("-m", "--model", dest="model", choices=MODEL_IDS, default=DEFAULT_MODEL,
                        help=f"模型，默认: {DEFAULT_MODEL}")
    parser.add_argument("--api-key", dest="api_key", default=os.environ.get(API_KEY_ENV_VAR),
                        help=f"API密钥，默认读取环境变量 {API_KEY_ENV_VAR}")

    language_codes = ', '.join(code for code, _ in LANGUAGES)
    parser.add_argument("--from", dest="source_language", default=DEFAULT_SOURCE_LANGUAGE,
                        help=f"源语言代码，默认: {DEFAULT_SOURCE_LANGUAGE} (自动检测)；常用: {language_codes}")
    parser.add_argument("--to", dest="target_language", default=DEFAULT_TARGET_LANGUAGE,
                        help=f"目标语言代码，默认: {DEFAULT_TARGET_LANGUAGE}")
    parser.add_argument("--swap", dest="swap", action="store_true", default=False,
                        help="交换源语言和目标语言")

    # 输入格式选项
    parser.add_argument("-format", dest="input_format", choices=['auto', 'html', 'text'], default='auto',
                        help="输入格式：auto(按扩展名和内容判断)、html(保留结构翻译)或text(整体翻译并按Markdown渲染)")
    parser.add_argument("--timeout", dest="timeout", type=float, default=None,
                        help="HTTP请求超时秒数，默认不限制")

    # 历史选项
    parser.add_argument("--history", dest="history_file", help="翻译历史文件路径，不指定则不记录")
    parser.add_argument("--show-history", dest="show_history", action="store_true", default=False,
                        help="显示翻译历史后退出")
    parser.add_argument("--clear-history", dest="clear_history", action="store_true", default=False,
                        help="清空翻译历史后退出")

    # 调试选项
    parser.add_argument("-debug", "--verbose", dest="debug", action="store_true", default=False,
                        help="显示调试信息")
    parser.add_argument("-html-debug", dest="html_debug", action="store_true", default=False,
                        help="仅显示HTML处理的调试信息")
    parser.add_argument("-trans-debug", dest="trans_debug", action="store_true", default=False,
                        help="仅显示翻译服务的详细调试信息")


def show_history(history_file):
    entries = TranslationHistory(history_file).load()
    if not entries:
        print("暂无翻译历史。")
        return
    for entry in entries:
        print(format_entry(entry))


def main(argv=None):
    """命令行入口函数

    解析命令行参数并启动翻译流程
    """
    parser = argparse.ArgumentParser(description="aitrans - 保留HTML结构的AI翻译工具")
    add_translation_options(parser)
    args = parser.parse_args(argv)

    if args.show_history or args.clear_history:
        if not args.history_file:
            print("\n错误：请使用 --history 指定历史文件。")
            return 1
        if args.clear_history:
            TranslationHistory(args.history_file).clear()
            print("已清空翻译历史。")
        else:
            show_history(args.history_file)
        return 0

    if not args.input_file:
        parser.print_help()
        print("\n错误：缺少输入文件。请使用 -i 或 --input-file 指定。")
        return 1

    source_language, target_language = args.source_language, args.target_language
    if args.swap:
        source_language, target_language = swap_languages(source_language, target_language)

    html_debug = args.html_debug or args.debug
    trans_debug = args.trans_debug or args.debug

    try:
        run_translation(
            input_file=args.input_file,
            output_file=args.output_file,
            source_language=source_language,
            target_language=target_language,
            model=args.model,
            api_key=args.api_key,
            translation_service_name=args.translation_service,
            input_format=args.input_format,
            history_file=args.history_file,
            timeout=args.timeout,
            html_debug=html_debug,
            trans_debug=trans_debug
        )
        return 0 # 成功退出
    except Exception:
        # 错误信息已在 run_translation 中打印
        return 1 # 失败退出

if __name__ == "__main__":
    sys.exit(main())
