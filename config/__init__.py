"""配置模块：运行配置（settings）与门店业务配置（business_config）"""
