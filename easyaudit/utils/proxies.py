"""Framework classes that are expensive to construct and should be injected through a proxy."""

from __future__ import annotations

CLASS_TO_PROXY = frozenset(
    {
        "Psr\\Log\\LoggerInterface",
        "Magento\\Framework\\App\\ResourceConnection",
        "Magento\\Framework\\App\\Cache\\TypeListInterface",
        "Magento\\Framework\\App\\Config\\ScopeConfigInterface",
        "Magento\\Framework\\App\\State",
        "Magento\\Framework\\Filesystem",
        "Magento\\Framework\\Session\\SessionManagerInterface",
        "Magento\\Framework\\Stdlib\\CookieManagerInterface",
        "Magento\\Framework\\View\\LayoutInterface",
        "Magento\\Framework\\Mail\\Template\\TransportBuilder",
        "Magento\\Framework\\Indexer\\IndexerRegistry",
        "Magento\\Backend\\Model\\Session",
        "Magento\\Backend\\Model\\Auth\\Session",
        "Magento\\Catalog\\Model\\Session",
        "Magento\\Checkout\\Model\\Session",
        "Magento\\Customer\\Model\\Session",
        "Magento\\Customer\\Model\\Url",
        "Magento\\Quote\\Api\\CartRepositoryInterface",
        "Magento\\Catalog\\Api\\ProductRepositoryInterface",
        "Magento\\Catalog\\Model\\ProductRepository",
        "Magento\\Customer\\Api\\CustomerRepositoryInterface",
        "Magento\\Sales\\Api\\OrderRepositoryInterface",
        "Magento\\Store\\Model\\StoreManagerInterface",
        "Magento\\Eav\\Model\\Config",
        "Magento\\Framework\\Search\\Request\\Builder",
    }
)


def is_proxy_required(class_name: str) -> bool:
    return bool(class_name) and class_name.lstrip("\\") in CLASS_TO_PROXY
