"""
业务配置接口 - 支持可替换的门店业务配置

新项目可以实现自己的业务配置，替换默认配置。
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any


SKIN_TYPES = ("dry", "oily", "combination", "sensitive", "normal")
PRODUCT_TYPES = ("voucher", "single")
PRODUCT_STATUSES = ("active", "inactive")
APPOINTMENT_STATUSES = ("scheduled", "completed", "cancelled", "no-show")
FINANCE_TYPES = ("income", "expense")

# 取消/爽约的预约不扣次数时使用（默认所有预约都扣次数）
NON_CONSUMING_STATUSES = ("cancelled", "no-show")


class BusinessConfig(ABC):
    """业务配置抽象基类"""

    @abstractmethod
    def get_default_products(self) -> List[Dict[str, Any]]:
        """获取初始商品/次卡目录"""
        pass

    @abstractmethod
    def get_shop_profile(self) -> Dict[str, Any]:
        """获取门店基本信息"""
        pass

    @abstractmethod
    def get_session_unit(self) -> str:
        """获取次数单位（用于剩余次数展示）"""
        pass


class EstheticShopConfig(BusinessConfig):
    """美容护肤门店业务配置"""

    def get_default_products(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Basic Facial", "price": 50000, "type": "single",
             "unit_count": 1, "status": "active"},
            {"name": "Basic Facial 10x", "price": 450000, "type": "voucher",
             "unit_count": 10, "status": "active"},
            {"name": "Hydra Care 5x", "price": 300000, "type": "voucher",
             "unit_count": 5, "status": "active"},
            {"name": "Lifting Care", "price": 120000, "type": "single",
             "unit_count": 1, "status": "active"},
        ]

    def get_shop_profile(self) -> Dict[str, Any]:
        return {
            "business_name": "Esthetic Shop",
            "business_phone": "02-1234-5678",
            "business_hours": "09:00-18:00",
            "appointment_time_interval": 30,
            "currency_unit": "KRW",
        }

    def get_session_unit(self) -> str:
        return "sessions"


# 全局业务配置实例（可以在 app.py 中替换）
business_config: BusinessConfig = EstheticShopConfig()
