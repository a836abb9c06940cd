"""
描述: 通用工具子包
主要功能:
    - 结构化日志 (logger)
    - 异常分类 (exceptions)
"""
