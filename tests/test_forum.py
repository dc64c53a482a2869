import json
import uuid

import pytest

from nextdoor.errors import ValidationFailed
from nextdoor.models import Comment, Post
from nextdoor.models.enumerations import PostTag
from nextdoor.utils.model_utils.post_utils import POST_TABS, parse_tag, tag_counts


class TestPosts:
    """Test the community forum."""

    def test_create_post(self, client, community, create_user, auth_headers):
        user = create_user(display_name='Auntie May')

        response = client.post(f'/api/v1/communities/{community.slug}/posts',
                               data=json.dumps({
                                   'title': 'Lost cat',
                                   'body': 'Orange tabby near Blk 406',
                                   'tag': 'Lost & Found'
                               }),
                               headers=auth_headers(user))

        assert response.status_code == 201
        post = json.loads(response.data)['post']
        assert post['author'] == 'Auntie May'
        assert post['tag'] == 'Lost & Found'
        assert post['vote_count'] == 0
        assert post['user_vote'] is None
        assert post['comments'] == []

    def test_author_falls_back_to_email(self, client, community, create_user, auth_headers):
        user = create_user(email='tan.ah.kow@example.com')

        response = client.post(f'/api/v1/communities/{community.slug}/posts',
                               data=json.dumps({'title': 'Hi', 'body': 'Hello neighbours'}),
                               headers=auth_headers(user))

        post = json.loads(response.data)['post']
        assert post['author'] == 'tan.ah.kow'
        assert post['tag'] == 'General'

    def test_create_post_requires_title_and_body(self, client, community, create_user, auth_headers):
        user = create_user()

        response = client.post(f'/api/v1/communities/{community.slug}/posts',
                               data=json.dumps({'title': '   ', 'body': 'text'}),
                               headers=auth_headers(user))

        assert response.status_code == 400
        assert json.loads(response.data)['title'] == 'Missing Information'
        assert Post.query.count() == 0

    def test_create_post_unknown_tag(self, client, community, create_user, auth_headers):
        user = create_user()

        response = client.post(f'/api/v1/communities/{community.slug}/posts',
                               data=json.dumps({'title': 'Hi', 'body': 'text', 'tag': 'Gossip'}),
                               headers=auth_headers(user))

        assert response.status_code == 400

    def test_create_post_requires_login(self, client, community):
        response = client.post(f'/api/v1/communities/{community.slug}/posts',
                               data=json.dumps({'title': 'Hi', 'body': 'text'}),
                               content_type='application/json')

        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'Please log in to post'

    def test_feed_newest_first(self, client, community, create_user, create_post):
        user = create_user()
        create_post(community, user, title='Older')
        create_post(community, user, title='Newer')

        response = client.get(f'/api/v1/communities/{community.slug}/posts')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert [p['title'] for p in data['posts']] == ['Newer', 'Older']
        assert data['tabs'] == list(POST_TABS)
        assert data['counts']['total'] == 2

    def test_feed_tag_filter_keeps_full_counts(self, client, community, create_user, create_post):
        user = create_user()
        create_post(community, user, title='Sale', tag=PostTag.BUY_SELL)
        create_post(community, user, title='Hello')

        response = client.get(f'/api/v1/communities/{community.slug}/posts?tag=Buy/Sell')

        data = json.loads(response.data)
        assert [p['title'] for p in data['posts']] == ['Sale']
        assert data['counts']['total'] == 2
        assert data['counts']['Buy/Sell'] == 1
        assert data['counts']['General'] == 1

    def test_feed_other_community_is_separate(self, client, community, create_user, create_post):
        user = create_user()
        create_post(community, user)

        response = client.get('/api/v1/communities/unknown-place/posts')

        assert response.status_code == 404


class TestComments:

    def test_add_comment(self, client, community, create_user, create_post, auth_headers):
        user = create_user(display_name='Uncle Tan')
        post = create_post(community, user)

        response = client.post(f'/api/v1/communities/{community.slug}/posts/{post.id}/comments',
                               data=json.dumps({'body': 'Welcome!'}),
                               headers=auth_headers(user))

        assert response.status_code == 201
        comment = json.loads(response.data)['comment']
        assert comment['author'] == 'Uncle Tan'
        assert comment['post_id'] == str(post.id)

        feed = json.loads(client.get(f'/api/v1/communities/{community.slug}/posts').data)
        assert feed['posts'][0]['comments'][0]['body'] == 'Welcome!'

    def test_empty_comment(self, client, community, create_user, create_post, auth_headers):
        user = create_user()
        post = create_post(community, user)

        response = client.post(f'/api/v1/communities/{community.slug}/posts/{post.id}/comments',
                               data=json.dumps({'body': '  '}),
                               headers=auth_headers(user))

        assert response.status_code == 400
        assert Comment.query.count() == 0

    def test_comment_on_unknown_post(self, client, community, create_user, auth_headers):
        user = create_user()

        response = client.post(f'/api/v1/communities/{community.slug}/posts/{uuid.uuid4()}/comments',
                               data=json.dumps({'body': 'Hello'}),
                               headers=auth_headers(user))

        assert response.status_code == 404


class TestTags:

    def test_parse_tag_defaults_to_general(self):
        assert parse_tag(None) == PostTag.GENERAL
        assert parse_tag('') == PostTag.GENERAL
        assert parse_tag('Food') == PostTag.FOOD

    def test_parse_tag_rejects_unknown(self):
        with pytest.raises(ValidationFailed):
            parse_tag('Gossip')

    def test_tag_counts_has_every_tag(self):
        counts = tag_counts([])
        assert counts['total'] == 0
        assert set(counts) == {tag.value for tag in PostTag} | {'total'}
