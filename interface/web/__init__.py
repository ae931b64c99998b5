"""Web 接口"""
