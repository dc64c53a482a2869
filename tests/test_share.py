import json
from datetime import date
from types import SimpleNamespace
from urllib.parse import unquote

from nextdoor.utils.share import (
    category_display_name,
    format_price,
    format_share_date,
    generate_share_message,
    group_buy_url,
    telegram_link,
    whatsapp_link,
)


def _group_buy(**overrides):
    attrs = dict(
        title='Durian feast',
        description='Mao Shan Wang from Pahang',
        category='groceries',
        price_individual=20.0,
        price_group=17.5,
        target_quantity=8,
        pickup_location='Blk 406 void deck',
        deadline=date(2025, 7, 5),
    )
    attrs.update(overrides)
    return SimpleNamespace(**attrs)


class TestShareMessage:

    def test_message(self):
        message = generate_share_message(_group_buy(), 'https://example.sg/gb/1')

        assert message.startswith('🛒 *Group Buy Alert!*')
        assert '📦 *Durian feast*' in message
        assert '• Individual: S$20\n' in message
        assert '• Group Price: S$17.5\n' in message
        assert '*Save S$2.50 (13% off!)*' in message
        assert '👥 *Target:* 8 people' in message
        assert '⏰ *Deadline:* 5/7/2025' in message
        assert message.endswith('Join now: https://example.sg/gb/1')

    def test_hashtags(self):
        message = generate_share_message(_group_buy(category='household'), 'u', with_hashtags=True)
        assert message.endswith('\n\n#GroupBuy #HouseholdItems')

    def test_unknown_category_hashtag(self):
        message = generate_share_message(_group_buy(category='cars'), 'u', with_hashtags=True)
        assert message.endswith('#GroupBuy #General')

    def test_format_price(self):
        assert format_price(12.0) == '12'
        assert format_price('12.50') == '12.5'

    def test_format_share_date(self):
        assert format_share_date('2025-12-01') == '1/12/2025'

    def test_category_display_name(self):
        assert category_display_name('clothing') == 'Clothing & Fashion'
        assert category_display_name('cars') == 'cars'


class TestDeepLinks:

    def test_telegram(self):
        link = telegram_link("Join now! (it's cheap)")
        assert link == "tg://msg?text=Join%20now!%20(it's%20cheap)"

    def test_whatsapp_round_trip(self):
        message = generate_share_message(_group_buy(), 'https://example.sg/gb/1')
        link = whatsapp_link(message)

        assert link.startswith('https://wa.me/?text=')
        assert '\n' not in link
        assert unquote(link[len('https://wa.me/?text='):]) == message

    def test_group_buy_url(self):
        assert group_buy_url('https://example.sg/', 'amk', 'abc') == 'https://example.sg/community/amk/groupbuy/abc'


class TestShareRoute:

    def test_share(self, client, community, create_user, create_group_buy):
        group_buy = create_group_buy(community, create_user())

        response = client.get(f'/api/v1/communities/{community.slug}/group-buys/{group_buy.id}/share')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['url'] == f'http://testserver/community/{community.slug}/groupbuy/{group_buy.id}'
        assert '#GroupBuy' not in data['message']
        assert data['telegram'].startswith('tg://msg?text=')
        assert '%23GroupBuy%20%23Groceries' in data['whatsapp']
