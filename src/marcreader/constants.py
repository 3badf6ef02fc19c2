# ISO2709 structural characters
US = b'\x1f'
FT = b'\x1e'
RT = b'\x1d'

LEADER_LEN = 24
DIRECTORY_ENTRY_LEN = 12

MARCXML_NS = 'http://www.loc.gov/MARC21/slim'

LINKAGE_CODE = '6'
