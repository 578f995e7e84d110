from routes.xactimate_pricing_routes import xactimate_pricing_routes
from routes.pricing_macro_routes import pricing_macro_routes
from routes.vendor_pricing_routes import vendor_pricing_routes

# Import and register the routes from the route blueprints

def initialize_routes(app):
    app.register_blueprint(xactimate_pricing_routes)
    app.register_blueprint(pricing_macro_routes)
    app.register_blueprint(vendor_pricing_routes)
