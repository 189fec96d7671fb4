"""
功能模組

包含像素轉換引擎與 Worker
"""
