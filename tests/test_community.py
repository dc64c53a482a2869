import json

from nextdoor.models import CommunityMember
from nextdoor.utils.model_utils.community_utils import is_member, join_community, member_count


class TestCommunity:
    """Test community pages and membership."""

    def test_get_community_anonymous(self, client, community):
        response = client.get(f'/api/v1/communities/{community.slug}')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['name'] == 'Ang Mo Kio Avenue 3 Blk 400–409'
        assert data['member_count'] == 0
        assert data['is_member'] is False

    def test_get_community_as_member(self, client, community, create_user, auth_headers):
        user = create_user()
        join_community(community, user.id)

        response = client.get(f'/api/v1/communities/{community.slug}', headers=auth_headers(user))

        data = json.loads(response.data)
        assert data['member_count'] == 1
        assert data['is_member'] is True

    def test_unknown_community(self, client, sectors):
        response = client.get('/api/v1/communities/nowhere')

        assert response.status_code == 404
        assert json.loads(response.data)['message'] == 'Community not found'

    def test_join(self, client, community, create_user, auth_headers):
        user = create_user()

        response = client.post(f'/api/v1/communities/{community.slug}/membership',
                               headers=auth_headers(user))

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['title'] == 'Joined Successfully!'
        assert data['message'] == 'Welcome to Ang Mo Kio Avenue 3 Blk 400–409'
        assert data['member_count'] == 1
        assert is_member(community, user.id) is True

    def test_join_twice(self, client, community, create_user, auth_headers):
        user = create_user()
        headers = auth_headers(user)
        client.post(f'/api/v1/communities/{community.slug}/membership', headers=headers)

        response = client.post(f'/api/v1/communities/{community.slug}/membership', headers=headers)

        assert response.status_code == 409
        data = json.loads(response.data)
        assert data['title'] == 'Already a Member'
        assert data['message'] == "You're already a member of this community"
        assert CommunityMember.query.count() == 1

    def test_join_requires_login(self, client, community):
        response = client.post(f'/api/v1/communities/{community.slug}/membership')

        assert response.status_code == 401
        assert json.loads(response.data)['message'] == 'Please log in to join this community'

    def test_leave(self, client, community, create_user, auth_headers):
        user = create_user()
        join_community(community, user.id)

        response = client.delete(f'/api/v1/communities/{community.slug}/membership',
                                 headers=auth_headers(user))

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['removed'] is True
        assert member_count(community) == 0

    def test_leave_when_not_member(self, client, community, create_user, auth_headers):
        user = create_user()

        response = client.delete(f'/api/v1/communities/{community.slug}/membership',
                                 headers=auth_headers(user))

        assert response.status_code == 200
        assert json.loads(response.data)['removed'] is False

    def test_members(self, client, community, create_user):
        named = create_user(email='may@example.com', display_name='Auntie May')
        unnamed = create_user(email='tan.ah.kow@example.com')
        join_community(community, named.id)
        join_community(community, unnamed.id)

        response = client.get(f'/api/v1/communities/{community.slug}/members')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['count'] == 2
        names = sorted(m['display_name'] for m in data['members'])
        assert names == ['Auntie May', 'tan.ah.kow']
        initials = {m['display_name']: m['initials'] for m in data['members']}
        assert initials['Auntie May'] == 'AU'


class TestMyCommunities:

    def test_list(self, client, community, create_user, auth_headers):
        user = create_user()
        join_community(community, user.id)

        response = client.get('/api/v1/me/communities', headers=auth_headers(user))

        assert response.status_code == 200
        communities = json.loads(response.data)['communities']
        assert len(communities) == 1
        assert communities[0]['slug'] == community.slug
        assert communities[0]['region'] == 'Central'

    def test_requires_login(self, client):
        response = client.get('/api/v1/me/communities')
        assert response.status_code == 401

    def test_leave_from_list(self, client, community, create_user, auth_headers):
        user = create_user()
        join_community(community, user.id)

        response = client.delete(f'/api/v1/me/communities/{community.slug}', headers=auth_headers(user))

        assert response.status_code == 200
        assert json.loads(response.data)['removed'] is True
        assert is_member(community, user.id) is False
