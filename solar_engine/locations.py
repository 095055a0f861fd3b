# solar_engine/locations.py
#
# Peak sun hours (HSP) per Brazilian state and main cities, yearly average.
# Source: Atlas Brasileiro de Energia Solar (INPE) and CRESESB.

from __future__ import annotations
from typing import Dict, List, Optional, Union
import math
import unicodedata


DEFAULT_HSP = 4.8   # national average


BRAZIL_HSP: Dict[str, Dict] = {
    "AC": {"name": "Acre", "hsp": 4.5, "cities": {"Rio Branco": 4.5}},
    "AL": {"name": "Alagoas", "hsp": 5.2, "cities": {"Maceió": 5.3, "Arapiraca": 5.1}},
    "AP": {"name": "Amapá", "hsp": 4.6, "cities": {"Macapá": 4.6}},
    "AM": {"name": "Amazonas", "hsp": 4.4, "cities": {"Manaus": 4.4}},
    "BA": {
        "name": "Bahia", "hsp": 5.5,
        "cities": {
            "Salvador": 5.2, "Feira de Santana": 5.4, "Vitória da Conquista": 5.6,
            "Camaçari": 5.2, "Juazeiro": 6.0, "Barreiras": 5.8,
        },
    },
    "CE": {
        "name": "Ceará", "hsp": 5.8,
        "cities": {"Fortaleza": 5.6, "Caucaia": 5.6, "Juazeiro do Norte": 5.9, "Sobral": 5.8},
    },
    "DF": {"name": "Distrito Federal", "hsp": 5.2, "cities": {"Brasília": 5.2}},
    "ES": {
        "name": "Espírito Santo", "hsp": 4.8,
        "cities": {"Vitória": 4.8, "Vila Velha": 4.8, "Serra": 4.7, "Cariacica": 4.7},
    },
    "GO": {
        "name": "Goiás", "hsp": 5.3,
        "cities": {"Goiânia": 5.3, "Aparecida de Goiânia": 5.3, "Anápolis": 5.2, "Rio Verde": 5.4},
    },
    "MA": {"name": "Maranhão", "hsp": 5.2, "cities": {"São Luís": 5.0, "Imperatriz": 5.3}},
    "MT": {
        "name": "Mato Grosso", "hsp": 5.2,
        "cities": {"Cuiabá": 5.2, "Várzea Grande": 5.2, "Rondonópolis": 5.3, "Sinop": 5.1},
    },
    "MS": {
        "name": "Mato Grosso do Sul", "hsp": 5.1,
        "cities": {"Campo Grande": 5.1, "Dourados": 5.0, "Três Lagoas": 5.2},
    },
    "MG": {
        "name": "Minas Gerais", "hsp": 5.2,
        "cities": {
            "Belo Horizonte": 5.1, "Uberlândia": 5.3, "Contagem": 5.1, "Juiz de Fora": 4.8,
            "Betim": 5.0, "Montes Claros": 5.6, "Uberaba": 5.4, "Governador Valadares": 5.0,
            "Ipatinga": 4.9, "Sete Lagoas": 5.2, "Divinópolis": 5.1, "Poços de Caldas": 4.9,
        },
    },
    "PA": {
        "name": "Pará", "hsp": 4.8,
        "cities": {"Belém": 4.7, "Ananindeua": 4.7, "Santarém": 4.9, "Marabá": 5.0},
    },
    "PB": {
        "name": "Paraíba", "hsp": 5.6,
        "cities": {"João Pessoa": 5.4, "Campina Grande": 5.7, "Patos": 6.0},
    },
    "PR": {
        "name": "Paraná", "hsp": 4.6,
        "cities": {
            "Curitiba": 4.4, "Londrina": 4.8, "Maringá": 4.8, "Ponta Grossa": 4.5,
            "Cascavel": 4.7, "Foz do Iguaçu": 4.6,
        },
    },
    "PE": {
        "name": "Pernambuco", "hsp": 5.5,
        "cities": {
            "Recife": 5.3, "Jaboatão dos Guararapes": 5.3, "Olinda": 5.3,
            "Caruaru": 5.5, "Petrolina": 6.1,
        },
    },
    "PI": {"name": "Piauí", "hsp": 5.8, "cities": {"Teresina": 5.7, "Parnaíba": 5.6, "Picos": 6.0}},
    "RJ": {
        "name": "Rio de Janeiro", "hsp": 4.6,
        "cities": {
            "Rio de Janeiro": 4.5, "São Gonçalo": 4.5, "Duque de Caxias": 4.5, "Nova Iguaçu": 4.5,
            "Niterói": 4.6, "Campos dos Goytacazes": 4.8, "Petrópolis": 4.3,
        },
    },
    "RN": {
        "name": "Rio Grande do Norte", "hsp": 5.8,
        "cities": {"Natal": 5.6, "Mossoró": 6.0, "Parnamirim": 5.6},
    },
    "RS": {
        "name": "Rio Grande do Sul", "hsp": 4.4,
        "cities": {
            "Porto Alegre": 4.4, "Caxias do Sul": 4.3, "Pelotas": 4.3, "Canoas": 4.4,
            "Santa Maria": 4.5, "Gravataí": 4.4,
        },
    },
    "RO": {"name": "Rondônia", "hsp": 4.7, "cities": {"Porto Velho": 4.7, "Ji-Paraná": 4.8}},
    "RR": {"name": "Roraima", "hsp": 4.9, "cities": {"Boa Vista": 4.9}},
    "SC": {
        "name": "Santa Catarina", "hsp": 4.3,
        "cities": {
            "Joinville": 4.2, "Florianópolis": 4.3, "Blumenau": 4.2, "São José": 4.3,
            "Chapecó": 4.4, "Criciúma": 4.3,
        },
    },
    "SP": {
        "name": "São Paulo", "hsp": 4.8,
        "cities": {
            "São Paulo": 4.6, "Guarulhos": 4.6, "Campinas": 4.9, "São Bernardo do Campo": 4.6,
            "Santo André": 4.6, "São José dos Campos": 4.7, "Osasco": 4.6, "Ribeirão Preto": 5.2,
            "Sorocaba": 4.8, "Santos": 4.5, "São José do Rio Preto": 5.1, "Bauru": 5.0,
            "Piracicaba": 4.9, "Jundiaí": 4.8, "Presidente Prudente": 5.0,
        },
    },
    "SE": {"name": "Sergipe", "hsp": 5.4, "cities": {"Aracaju": 5.4}},
    "TO": {"name": "Tocantins", "hsp": 5.3, "cities": {"Palmas": 5.3, "Araguaína": 5.2}},
}


def _normalize(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower().strip()


# ============================================================
# LOOKUPS
# ============================================================

def hsp_for_state(state_code: str) -> float:
    state = BRAZIL_HSP.get((state_code or "").strip().upper())
    return state["hsp"] if state else DEFAULT_HSP


def find_city_hsp(city_name: str) -> Optional[float]:
    """Partial, accent-insensitive match; None when no city matches."""
    wanted = _normalize(city_name or "")
    if not wanted:
        return None

    for state in BRAZIL_HSP.values():
        for name, hsp in state["cities"].items():
            candidate = _normalize(name)
            if wanted in candidate or candidate in wanted:
                return hsp
    return None


def hsp_for_city(city_name: str) -> float:
    hsp = find_city_hsp(city_name)
    return hsp if hsp is not None else DEFAULT_HSP


def resolve_hsp(hsp_or_location: Union[float, int, str, None]) -> float:
    """
    Accepts a number (used as-is when > 0), a state code ("SP") or a city
    name ("Campinas"). Anything unknown falls back to DEFAULT_HSP.
    """
    if hsp_or_location is None:
        return DEFAULT_HSP

    if isinstance(hsp_or_location, (int, float)):
        if math.isfinite(hsp_or_location) and hsp_or_location > 0:
            return float(hsp_or_location)
        return DEFAULT_HSP

    text = str(hsp_or_location).strip()
    if text.upper() in BRAZIL_HSP:
        return hsp_for_state(text)

    return hsp_for_city(text)


# ============================================================
# LISTINGS (autocomplete)
# ============================================================

def all_states() -> List[Dict]:
    return [
        {"code": code, "name": data["name"], "hsp": data["hsp"]}
        for code, data in BRAZIL_HSP.items()
    ]


def all_cities() -> List[Dict]:
    cities = [
        {"city": name, "state": code, "hsp": hsp}
        for code, data in BRAZIL_HSP.items()
        for name, hsp in data["cities"].items()
    ]
    return sorted(cities, key=lambda c: _normalize(c["city"]))
