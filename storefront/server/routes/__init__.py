from storefront.server.routes.auth import bp_auth
from storefront.server.routes.cart import bp_cart
from storefront.server.routes.orders import bp_orders
from storefront.server.routes.products import bp_products
from storefront.server.routes.shop import bp_shop

BLUEPRINTS = (bp_auth, bp_shop, bp_products, bp_cart, bp_orders)
