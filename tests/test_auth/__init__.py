"""
tests.test_auth package.

令牌服务与认证配置相关测试。
"""
