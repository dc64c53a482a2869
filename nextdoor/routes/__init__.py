from flask import Flask


def register_blueprints(app: Flask) -> None:
    from nextdoor.routes.v1.auth_route import auth_bp, callback_bp
    from nextdoor.routes.v1.community import community_bp
    from nextdoor.routes.v1.location_route import location_bp, onemap_bp
    from nextdoor.routes.v1.stats_route import stats_bp
    from nextdoor.routes.v1.user_route import user_bp
    from nextdoor.routes.v1.vote_route import vote_bp

    prefix = app.config.get("API_PREFIX", "/api/v1")
    app.register_blueprint(auth_bp, url_prefix=f"{prefix}/auth")
    app.register_blueprint(callback_bp, url_prefix="/auth")
    app.register_blueprint(location_bp, url_prefix=prefix)
    app.register_blueprint(onemap_bp, url_prefix="/api")
    app.register_blueprint(community_bp, url_prefix=f"{prefix}/communities")
    app.register_blueprint(vote_bp, url_prefix=f"{prefix}/votes")
    app.register_blueprint(user_bp, url_prefix=prefix)
    app.register_blueprint(stats_bp, url_prefix=f"{prefix}/stats")
