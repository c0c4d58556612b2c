"""Editable seed menu and order-entry choices."""

from __future__ import annotations

CATEGORIES: list[str] = ["Tiffins", "Combos", "Fresh Juices", "Milkshakes", "Tea & Coffee"]

ORDER_TYPES: list[str] = ["Dine-in", "Parcel"]

# Loaded into an empty items table on first bootstrap.
SAMPLE_MENU: list[tuple[str, str, str]] = [
    ("Idli", "30.00", "Tiffins"),
    ("Sambar Idli", "50.00", "Tiffins"),
    ("Gheepodi Idli", "60.00", "Tiffins"),
    ("Vada", "50.00", "Tiffins"),
    ("Perugu Vada", "60.00", "Tiffins"),
    ("Mysore Bonda", "40.00", "Tiffins"),
    ("Upma", "40.00", "Tiffins"),
    ("Ghee Upma", "50.00", "Tiffins"),
    ("Ghee Pongal", "60.00", "Tiffins"),
    ("Poori", "55.00", "Tiffins"),
    ("Plain Dosa", "55.00", "Tiffins"),
    ("Onion Dosa", "65.00", "Tiffins"),
    ("Masala Dosa", "70.00", "Tiffins"),
    ("Upma Dosa", "65.00", "Tiffins"),
    ("Onion Masala Dosa", "75.00", "Tiffins"),
    ("Ghee Karam Dosa", "80.00", "Tiffins"),
    ("Ghee Karam Onion Dosa", "90.00", "Tiffins"),
    ("Ghee Karam Masala Dosa", "95.00", "Tiffins"),
    ("Ghee Karam Upma Dosa", "95.00", "Tiffins"),
    ("Ravva Dosa", "50.00", "Tiffins"),
    ("Onion Ravva Dosa", "60.00", "Tiffins"),
    ("Ravva Upma Dosa", "60.00", "Tiffins"),
    ("Onion Masala Ravva", "75.00", "Tiffins"),
    ("Uthappam", "55.00", "Tiffins"),
    ("Plain Pesarattu", "60.00", "Tiffins"),
    ("Chitti Pesarattu Upma", "65.00", "Tiffins"),
    ("Chitti Pesarattu", "60.00", "Tiffins"),
    ("Pesarattu Upma", "60.00", "Tiffins"),
    ("Onion Pesarattu", "70.00", "Tiffins"),
    ("Onion Pesarattu Upma", "80.00", "Tiffins"),
    ("Chapathi", "50.00", "Tiffins"),
    ("Parotta", "50.00", "Tiffins"),
    ("Single Poori Upma", "40.00", "Tiffins"),
    ("Pottikkallu", "40.00", "Tiffins"),
    ("Single Idli", "20.00", "Tiffins"),
    ("Single Vada", "30.00", "Tiffins"),
    ("Single Poori", "30.00", "Tiffins"),
    ("Single Perugu Vada", "30.00", "Tiffins"),
    ("2 Idli & 1 Bonda", "45.00", "Combos"),
    ("1 Idli & 2 Bonda", "40.00", "Combos"),
    ("1 Idli & 1 Bonda", "30.00", "Combos"),
    ("ABC Juice", "80.00", "Fresh Juices"),
    ("Carrot Juice", "70.00", "Fresh Juices"),
    ("Beetroot Juice", "70.00", "Fresh Juices"),
    ("Watermelon Juice", "60.00", "Fresh Juices"),
    ("Banana Juice", "50.00", "Fresh Juices"),
    ("Grapes Juice", "50.00", "Fresh Juices"),
    ("Karbujua Juice", "50.00", "Fresh Juices"),
    ("Pineapple Juice", "60.00", "Fresh Juices"),
    ("Papaya Juice", "50.00", "Fresh Juices"),
    ("Chocolate Milkshake", "70.00", "Milkshakes"),
    ("Vanilla Milkshake", "60.00", "Milkshakes"),
    ("Strawberry Milkshake", "70.00", "Milkshakes"),
    ("Butterscotch Milkshake", "80.00", "Milkshakes"),
    ("Tea", "10.00", "Tea & Coffee"),
    ("Green Tea", "20.00", "Tea & Coffee"),
    ("Lemon Tea", "20.00", "Tea & Coffee"),
    ("Ginger Tea", "20.00", "Tea & Coffee"),
    ("Filter Coffee", "30.00", "Tea & Coffee"),
    ("Coffee (Extra Strong)", "25.00", "Tea & Coffee"),
    ("Black Coffee", "20.00", "Tea & Coffee"),
    ("Hot Milk", "25.00", "Tea & Coffee"),
    ("Boost", "30.00", "Tea & Coffee"),
    ("Horlicks", "30.00", "Tea & Coffee"),
    ("Bournvita", "30.00", "Tea & Coffee"),
]
