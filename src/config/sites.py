# src/config/sites.py

"""Static site catalog, country currencies and product categories."""

from src.models.listing import SelectorMap, SiteConfig

_AMAZON_SELECTORS = SelectorMap(
    products='[data-component-type="s-search-result"]',
    title="h2 a span, h2 a, h2 span",
    price=".a-price .a-offscreen, .a-price-whole",
    link="h2 a, a.a-link-normal.s-no-outline",
    image=".s-image",
)

_ELECTRONICS = ("electronics", "mobile", "laptop", "tv")


def _amazon(name: str, domain: str, country: str) -> SiteConfig:
    """Build the catalog entry for one Amazon storefront."""
    return SiteConfig(
        name=name,
        base_url=f"https://www.{domain}",
        search_url=f"https://www.{domain}/s?k={{query}}&ref=nb_sb_noss",
        selectors=_AMAZON_SELECTORS,
        country=country,
        priority=10,
    )


SITES_BY_COUNTRY: dict[str, list[SiteConfig]] = {
    "US": [
        _amazon("Amazon US", "amazon.com", "US"),
        SiteConfig(
            name="Best Buy",
            base_url="https://www.bestbuy.com",
            search_url="https://www.bestbuy.com/site/searchpage.jsp?st={query}",
            selectors=SelectorMap(
                products=".sku-item",
                title=".sku-header a, .sku-title a",
                price=".pricing-current-price .sr-only, .priceView-customer-price span",
                link=".sku-header a, .sku-title a",
                image=".product-image img",
            ),
            country="US",
            priority=8,
        ),
        SiteConfig(
            name="Walmart",
            base_url="https://www.walmart.com",
            search_url="https://www.walmart.com/search/?query={query}",
            selectors=SelectorMap(
                products='[data-item-id], [data-testid="list-view"]',
                title='[data-automation-id="product-title"]',
                price='[data-automation-id="product-price"] span, [itemprop="price"]',
                link='a[link-identifier], a[href*="/ip/"]',
                image='img[data-testid="productTileImage"]',
            ),
            country="US",
            priority=9,
        ),
        SiteConfig(
            name="Target",
            base_url="https://www.target.com",
            search_url="https://www.target.com/s?searchTerm={query}",
            selectors=SelectorMap(
                products='[data-test="product-details"]',
                title='[data-test="product-title"]',
                price='[data-test="current-price"], [data-test="product-price"]',
                link='[data-test="product-title"] a, a[data-test="product-title"]',
                image="img[alt]",
            ),
            country="US",
            priority=7,
        ),
    ],
    "IN": [
        _amazon("Amazon India", "amazon.in", "IN"),
        SiteConfig(
            name="Flipkart",
            base_url="https://www.flipkart.com",
            search_url="https://www.flipkart.com/search?q={query}",
            selectors=SelectorMap(
                products="._1AtVbE, [data-id]",
                title="._4rR01T, .KzDlHZ, .wjcEIp",
                price="._30jeq3, .Nx9bqj",
                link="._1fQZEK, .CGtC98, a",
                image="._396cs4, .DByuf4",
            ),
            country="IN",
            priority=10,
        ),
        SiteConfig(
            name="Myntra",
            base_url="https://www.myntra.com",
            search_url="https://www.myntra.com/{query}",
            selectors=SelectorMap(
                products=".product-base",
                title=".product-brand, .product-product",
                price=".product-discountedPrice, .product-price",
                link="a",
                image=".product-imageSliderContainer img",
            ),
            country="IN",
            priority=6,
            categories=("fashion", "clothing", "shoes", "accessories"),
        ),
        SiteConfig(
            name="Croma",
            base_url="https://www.croma.com",
            search_url="https://www.croma.com/search/?text={query}",
            selectors=SelectorMap(
                products=".product-item",
                title=".product-title",
                price=".amount, .price",
                link="a",
                image=".product-image img",
            ),
            country="IN",
            priority=7,
            categories=_ELECTRONICS,
        ),
        SiteConfig(
            name="Sangeetha Mobiles",
            base_url="https://www.sangeethamobiles.com",
            search_url="https://www.sangeethamobiles.com/search?q={query}",
            selectors=SelectorMap(
                products=".product-item-info",
                title=".product-item-link",
                price=".price",
                link=".product-item-link",
                image=".product-image-photo",
            ),
            country="IN",
            priority=8,
            categories=("mobile", "phone", "smartphone"),
        ),
    ],
    "GB": [
        _amazon("Amazon UK", "amazon.co.uk", "GB"),
        SiteConfig(
            name="Currys",
            base_url="https://www.currys.co.uk",
            search_url="https://www.currys.co.uk/search?q={query}",
            selectors=SelectorMap(
                products=".product-result, .product",
                title=".product-title, .pdp-grid-product-name",
                price=".price, .value",
                link="a",
                image=".product-image img",
            ),
            country="GB",
            priority=8,
            categories=_ELECTRONICS,
        ),
        SiteConfig(
            name="Argos",
            base_url="https://www.argos.co.uk",
            search_url="https://www.argos.co.uk/search/{query}/",
            selectors=SelectorMap(
                products='[data-test="component-product-card"], .ProductCardstyles__Wrapper',
                title='[data-test="component-product-card-title"], .ProductCardstyles__Title',
                price='[data-test="component-product-card-price"], .ProductCardstyles__PriceText',
                link="a",
                image="picture img, .ProductCardstyles__Image img",
            ),
            country="GB",
            priority=7,
        ),
    ],
    "DE": [
        _amazon("Amazon Germany", "amazon.de", "DE"),
        SiteConfig(
            name="Otto",
            base_url="https://www.otto.de",
            search_url="https://www.otto.de/suche/{query}/",
            selectors=SelectorMap(
                products=".productTile, article.find_tile",
                title=".productTile__title, .find_tile__name",
                price=".productTile__price, .find_tile__retailPrice",
                link=".productTile__link, a.find_tile__productLink",
                image=".productTile__image img, img.find_tile__productImage",
            ),
            country="DE",
            priority=8,
        ),
    ],
    "AU": [
        _amazon("Amazon Australia", "amazon.com.au", "AU"),
        SiteConfig(
            name="JB Hi-Fi",
            base_url="https://www.jbhifi.com.au",
            search_url="https://www.jbhifi.com.au/search?query={query}",
            selectors=SelectorMap(
                products=".product-item, [data-testid='product-card']",
                title=".product-title, [data-testid='product-card-title']",
                price=".price, [data-testid='ticket-price']",
                link="a",
                image=".product-image img, img",
            ),
            country="AU",
            priority=8,
            categories=_ELECTRONICS + ("gaming",),
        ),
    ],
    "CA": [
        _amazon("Amazon Canada", "amazon.ca", "CA"),
        SiteConfig(
            name="Best Buy Canada",
            base_url="https://www.bestbuy.ca",
            search_url="https://www.bestbuy.ca/en-ca/search?search={query}",
            selectors=SelectorMap(
                products=".product-item, [data-automation='productItem']",
                title=".product-title, [data-automation='productItemName']",
                price=".screenReaderOnly, [data-automation='product-price'] span",
                link=".product-title a, a",
                image=".product-image img, img",
            ),
            country="CA",
            priority=8,
        ),
    ],
}

CURRENCY_BY_COUNTRY: dict[str, str] = {
    "US": "USD",
    "IN": "INR",
    "GB": "GBP",
    "DE": "EUR",
    "AU": "AUD",
    "CA": "CAD",
    "FR": "EUR",
    "IT": "EUR",
    "ES": "EUR",
    "JP": "JPY",
    "KR": "KRW",
    "CN": "CNY",
    "BR": "BRL",
    "MX": "MXN",
}

DEFAULT_CURRENCY = "USD"

# First category whose keywords appear in the query wins
PRODUCT_CATEGORIES: dict[str, list[str]] = {
    "electronics": [
        "mobile", "phone", "laptop", "computer",
        "tv", "camera", "headphones", "speakers",
    ],
    "fashion": [
        "clothing", "shoes", "dress", "shirt",
        "pants", "jacket", "accessories",
    ],
    "home": ["furniture", "kitchen", "appliance", "bedding", "decor"],
    "sports": ["fitness", "sports", "outdoor", "exercise", "gym"],
    "books": ["book", "novel", "textbook", "magazine"],
    "automotive": ["car", "auto", "motorcycle", "parts", "accessories"],
}

GENERAL_CATEGORY = "general"


def get_sites_for_country(country_code: str | None) -> list[SiteConfig]:
    """Return the catalog sites for a country (case-insensitive)."""
    if not country_code:
        return []
    return list(SITES_BY_COUNTRY.get(country_code.strip().upper(), []))


def get_currency_for_country(country_code: str | None) -> str:
    """Return the country's currency, defaulting to USD."""
    if not country_code:
        return DEFAULT_CURRENCY
    return CURRENCY_BY_COUNTRY.get(
        country_code.strip().upper(), DEFAULT_CURRENCY
    )


def supported_countries() -> list[str]:
    """Return the country codes that have at least one catalog site."""
    return [code for code, sites in SITES_BY_COUNTRY.items() if sites]


def categorize_product(query: str) -> str:
    """Map a search query to a product category by keyword."""
    query_lower = query.lower()
    for category, keywords in PRODUCT_CATEGORIES.items():
        if any(keyword in query_lower for keyword in keywords):
            return category
    return GENERAL_CATEGORY
