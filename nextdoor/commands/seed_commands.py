import click
from flask.cli import with_appcontext

from nextdoor.extensions import db
from nextdoor.models import PostalSector

# (district, sector codes, general locations, region)
POSTAL_DISTRICTS = [
    (1, ["01", "02", "03", "04", "05", "06"], "Raffles Place, Cecil, Marina, People's Park", "Central"),
    (2, ["07", "08"], "Anson, Tanjong Pagar", "Central"),
    (3, ["14", "15", "16"], "Queenstown, Tiong Bahru", "Central"),
    (4, ["09", "10"], "Telok Blangah, Harbourfront", "Central"),
    (5, ["11", "12", "13"], "Pasir Panjang, Hong Leong Garden, Clementi New Town", "West"),
    (6, ["17"], "High Street, Beach Road", "Central"),
    (7, ["18", "19"], "Middle Road, Golden Mile", "Central"),
    (8, ["20", "21"], "Little India", "Central"),
    (9, ["22", "23"], "Orchard, Cairnhill, River Valley", "Central"),
    (10, ["24", "25", "26", "27"], "Ardmore, Bukit Timah, Holland Road, Tanglin", "Central"),
    (11, ["28", "29", "30"], "Watten Estate, Novena, Thomson", "Central"),
    (12, ["31", "32", "33"], "Balestier, Toa Payoh, Serangoon", "Central"),
    (13, ["34", "35", "36", "37"], "Macpherson, Braddell", "Central"),
    (14, ["38", "39", "40", "41"], "Geylang, Eunos", "Central"),
    (15, ["42", "43", "44", "45"], "Katong, Joo Chiat, Amber Road", "East"),
    (16, ["46", "47", "48"], "Bedok, Upper East Coast, Eastwood, Kew Drive", "East"),
    (17, ["49", "50", "81"], "Loyang, Changi", "East"),
    (18, ["51", "52"], "Tampines, Pasir Ris", "East"),
    (19, ["53", "54", "55", "82"], "Serangoon Garden, Hougang, Punggol", "Northeast"),
    (20, ["56", "57"], "Bishan, Ang Mo Kio", "Central"),
    (21, ["58", "59"], "Upper Bukit Timah, Clementi Park, Ulu Pandan", "West"),
    (22, ["60", "61", "62", "63", "64"], "Jurong", "West"),
    (23, ["65", "66", "67", "68"], "Hillview, Dairy Farm, Bukit Panjang, Choa Chu Kang", "West"),
    (24, ["69", "70", "71"], "Lim Chu Kang, Tengah", "North"),
    (25, ["72", "73"], "Kranji, Woodgrove", "North"),
    (26, ["77", "78"], "Upper Thomson, Springleaf", "North"),
    (27, ["75", "76"], "Yishun, Sembawang", "North"),
    (28, ["79", "80"], "Seletar", "Northeast"),
]


def seed_postal_sectors() -> int:
    """Insert any missing sector rows; returns how many were added."""
    existing = {code for (code,) in db.session.query(PostalSector.sector_code).all()}
    added = 0
    for district, codes, locations, region in POSTAL_DISTRICTS:
        district_name = locations.split(",")[0].strip()
        for code in codes:
            if code in existing:
                continue
            db.session.add(PostalSector(
                sector_code=code,
                postal_district=district,
                district_name=district_name,
                region=region,
                general_locations=locations,
            ))
            added += 1
    db.session.commit()
    return added


@click.command("seed-sectors")
@with_appcontext
def seed_command():
    """Load the Singapore postal district / sector lookup table."""
    added = seed_postal_sectors()
    if added:
        click.echo(f"Seeded {added} postal sectors.")
    else:
        click.echo("Postal sectors already seeded.")
