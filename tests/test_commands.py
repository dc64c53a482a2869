from nextdoor.commands.seed_commands import POSTAL_DISTRICTS, seed_postal_sectors
from nextdoor.models import PostalSector


class TestSeedCommand:

    def test_seed_sectors(self, runner):
        result = runner.invoke(args=['seed-sectors'])

        assert result.exit_code == 0
        assert 'Seeded 81 postal sectors.' in result.output
        assert PostalSector.query.count() == sum(len(codes) for _, codes, _, _ in POSTAL_DISTRICTS)

    def test_seed_is_idempotent(self, runner):
        seed_postal_sectors()

        result = runner.invoke(args=['seed-sectors'])

        assert result.exit_code == 0
        assert 'already seeded' in result.output
        assert seed_postal_sectors() == 0

    def test_district_name_is_first_location(self, app):
        seed_postal_sectors()
        sector = PostalSector.query.filter_by(sector_code='01').one()
        assert sector.district_name == 'Raffles Place'
        assert sector.general_locations.startswith('Raffles Place, Cecil')


class TestSetupCommand:

    def test_setup_creates_tables_and_seeds(self, runner):
        result = runner.invoke(args=['setup'])

        assert result.exit_code == 0
        assert 'Tables created' in result.output
        assert 'Postal sectors ready (81 added)' in result.output

    def test_setup_without_seed(self, runner):
        result = runner.invoke(args=['setup', '--no-seed'])

        assert result.exit_code == 0
        assert PostalSector.query.count() == 0
