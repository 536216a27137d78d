"""Country code translation between the Olympic (NOC) and World Bank (ISO) vocabularies."""

import pandas as pd

# =========================================================
# NOC -> ISO3 手动映射
# 大部分 NOC 与 ISO3 相同，只列出不同的；历史代表团 (URS, GDR, FRG, TCH, YUG ...)
# 没有现代 ISO 代码，故意不映射
# =========================================================
NOC_TO_ISO3 = {
    'ALG': 'DZA', 'ANG': 'AGO', 'ANT': 'ATG', 'ARU': 'ABW', 'BAH': 'BHS',
    'BAN': 'BGD', 'BAR': 'BRB', 'BER': 'BMU', 'BOT': 'BWA', 'BUL': 'BGR',
    'CHI': 'CHL', 'CRC': 'CRI', 'CRO': 'HRV', 'DEN': 'DNK', 'ESA': 'SLV',
    'FIJ': 'FJI', 'GER': 'DEU', 'GRE': 'GRC', 'GRN': 'GRD', 'GUA': 'GTM',
    'HAI': 'HTI', 'HON': 'HND', 'INA': 'IDN', 'IRI': 'IRN', 'ISV': 'VIR',
    'IVB': 'VGB', 'KSA': 'SAU', 'KUW': 'KWT', 'LAT': 'LVA', 'LIB': 'LBN',
    'MAS': 'MYS', 'MGL': 'MNG', 'MRI': 'MUS', 'NED': 'NLD', 'NEP': 'NPL',
    'NGR': 'NGA', 'NIG': 'NER', 'PAR': 'PRY', 'PHI': 'PHL', 'POR': 'PRT',
    'PUR': 'PRI', 'RSA': 'ZAF', 'SLO': 'SVN', 'SRI': 'LKA', 'SUD': 'SDN',
    'SUI': 'CHE', 'TAN': 'TZA', 'TOG': 'TGO', 'TPE': 'TWN', 'TRI': 'TTO',
    'UAE': 'ARE', 'URU': 'URY', 'VIE': 'VNM', 'ZAM': 'ZMB', 'ZIM': 'ZWE',
}


def _clean_code(code):
    if not isinstance(code, str):
        return None
    code = code.strip().upper()
    return code or None


class CountryCodeTable:
    """Versioned lookup service handed to the joiner.

    Every lookup returns ``None`` on a miss; nothing here reads module state
    other than what was passed to the constructor.
    """

    def __init__(self, iso2_to_iso3=None, iso3_to_name=None, noc_aliases=None, version="custom"):
        self.version = version
        self._iso2_to_iso3 = {_clean_code(k): _clean_code(v)
                              for k, v in (iso2_to_iso3 or {}).items() if _clean_code(k) and _clean_code(v)}
        self._iso3_to_name = {_clean_code(k): v
                              for k, v in (iso3_to_name or {}).items() if _clean_code(k) and isinstance(v, str)}
        self._noc_to_iso3 = {_clean_code(k): _clean_code(v) for k, v in (noc_aliases or {}).items()}
        self._iso3_to_noc = {v: k for k, v in self._noc_to_iso3.items()}

    def __len__(self):
        return len(self._iso2_to_iso3)

    def __repr__(self):
        return f"CountryCodeTable(version={self.version!r}, iso2={len(self._iso2_to_iso3)}, names={len(self._iso3_to_name)})"

    def iso3(self, iso2):
        return self._iso2_to_iso3.get(_clean_code(iso2))

    def name(self, iso3):
        return self._iso3_to_name.get(_clean_code(iso3))

    def noc_to_iso3(self, noc):
        noc = _clean_code(noc)
        if noc is None:
            return None
        return self._noc_to_iso3.get(noc, noc)

    def iso3_to_noc(self, iso3):
        iso3 = _clean_code(iso3)
        if iso3 is None:
            return None
        return self._iso3_to_noc.get(iso3, iso3)

    def display_name(self, noc):
        return self.name(self.noc_to_iso3(noc))

    @classmethod
    def from_indicator_rows(cls, indicators, noc_aliases=None, version=None):
        """Build the table from the country metadata the World Bank returns with each row.

        ``indicators`` needs ``iso2c``, ``iso3c`` and ``country`` columns (see
        ``fetch_data.fetch_indicators``). The first row seen for a code wins.
        """
        meta = indicators[['iso2c', 'iso3c', 'country']].dropna(subset=['iso2c', 'iso3c'])
        meta = meta.drop_duplicates(subset=['iso2c'], keep='first')
        iso2_to_iso3 = dict(zip(meta['iso2c'], meta['iso3c']))
        names = meta.dropna(subset=['country']).drop_duplicates(subset=['iso3c'], keep='first')
        iso3_to_name = dict(zip(names['iso3c'], names['country']))
        return cls(iso2_to_iso3, iso3_to_name,
                   NOC_TO_ISO3 if noc_aliases is None else noc_aliases,
                   version=version or 'worldbank')

    def to_frame(self):
        rows = [(iso2, iso3, self._iso3_to_noc.get(iso3, iso3), self._iso3_to_name.get(iso3))
                for iso2, iso3 in sorted(self._iso2_to_iso3.items())]
        return pd.DataFrame(rows, columns=['iso2c', 'iso3c', 'noc', 'country'])
