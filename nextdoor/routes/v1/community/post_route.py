from flask import g, jsonify, request

from nextdoor.routes.v1.community import community_bp
from nextdoor.schemas import CommentSchema, PostSchema
from nextdoor.security_utils import coerce_uuid
from nextdoor.utils.decorator import current_user_id, load_community, require_user
from nextdoor.utils.logging_utils import log_context
from nextdoor.utils.model_utils.post_utils import (
    POST_TABS,
    add_comment,
    create_post,
    feed_vote_context,
    get_post,
    list_posts,
    tag_counts,
)


@community_bp.route("/<slug>/posts", methods=["GET"])
@load_community
def get_posts(community):
    tag = request.args.get("tag")
    posts = list_posts(community, tag=tag)
    schema = PostSchema(many=True)
    schema.context = feed_vote_context(posts, current_user_id(optional=True))
    return jsonify({
        "posts": schema.dump(posts),
        "tabs": list(POST_TABS),
        "counts": tag_counts(list_posts(community) if tag and tag != "All" else posts),
    }), 200


@community_bp.route("/<slug>/posts", methods=["POST"])
@require_user(message="Please log in to post")
@load_community
def new_post(community):
    data = request.get_json(silent=True) or {}
    with log_context(module="post_route", action="create", community=community.slug):
        post = create_post(community, g.user, data.get("title"), data.get("body"), data.get("tag"))
        schema = PostSchema()
        schema.context = feed_vote_context([post], g.user.id)
        return jsonify({"message": "Post created", "post": schema.dump(post)}), 201


@community_bp.route("/<slug>/posts/<post_id>/comments", methods=["POST"])
@require_user(message="Please log in to comment")
@load_community
def new_comment(community, post_id):
    data = request.get_json(silent=True) or {}
    post = get_post(coerce_uuid(post_id), community)
    with log_context(module="post_route", action="comment", community=community.slug):
        comment = add_comment(post, g.user, data.get("body"))
        return jsonify({"message": "Comment added", "comment": CommentSchema().dump(comment)}), 201
