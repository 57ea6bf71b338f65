import os
from datetime import datetime

import pandas as pd

from wow_guild_store import WeeklyProgressStore

COLUMNS = [
    'Name', 'Realm', 'Class', 'Raid Kills', 'Raid Vault', 'Kill Details',
    'M+ 10+ This Week', 'Dungeon Vault', 'Week 0', 'Week 1', 'Week 2', 'Week 3', 'Updated',
]


def _format_details(details):
    return ', '.join(f"{d.boss_name} ({d.difficulty[0]})" for d in details)


def _format_dungeon_vault(slots):
    return ' / '.join(f"+{slot.key_level}" if slot.unlocked else '-' for slot in slots)


class WeeklyReportGenerator:
    def __init__(self, guild_data_path='guild_data', store=None):
        self.guild_data_path = guild_data_path
        self.report_path = os.path.join(guild_data_path, 'reports')
        self.store = store or WeeklyProgressStore(guild_data_path)

    def build_dataframe(self):
        """One row per tracked character, busiest raiders first"""
        rows = []
        for record in self.store.all_records():
            history = list(record.weekly_history) + [0] * (4 - len(record.weekly_history))
            rows.append({
                'Name': record.name,
                'Realm': record.realm,
                'Class': record.character_class or 'Unknown',
                'Raid Kills': record.weekly_raid_boss_kills,
                'Raid Vault': record.raid_vault_slots,
                'Kill Details': _format_details(record.weekly_raid_kill_details),
                'M+ 10+ This Week': record.weekly_ten_plus_count,
                'Dungeon Vault': _format_dungeon_vault(record.dungeon_vault_slots),
                'Week 0': history[0],
                'Week 1': history[1],
                'Week 2': history[2],
                'Week 3': history[3],
                'Updated': record.updated_at,
            })

        df = pd.DataFrame(rows, columns=COLUMNS)
        if df.empty:
            return df
        return df.sort_values(
            by=['Raid Kills', 'M+ 10+ This Week', 'Name'],
            ascending=[False, False, True],
        ).reset_index(drop=True)

    def _report_filename(self, extension):
        os.makedirs(self.report_path, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        return os.path.join(self.report_path, f'weekly_report_{timestamp}.{extension}')

    def generate_csv_report(self):
        """Write the weekly table as CSV and return its filename"""
        filename = self._report_filename('csv')
        self.build_dataframe().to_csv(filename, index=False)
        print(f"CSV report saved to {filename}")
        return filename

    def generate_excel_report(self):
        """Generate an Excel spreadsheet with the weekly table"""
        filename = self._report_filename('xlsx')
        df = self.build_dataframe()

        with pd.ExcelWriter(filename, engine='xlsxwriter') as writer:
            df.to_excel(writer, sheet_name='Weekly Progress', index=False, startrow=1, header=False)

            workbook = writer.book
            sheet = writer.sheets['Weekly Progress']
            header_format = workbook.add_format({
                'bold': True,
                'bg_color': '#0b2c5f',
                'font_color': 'white',
                'border': 1
            })

            for col, column_name in enumerate(df.columns):
                sheet.write(0, col, column_name, header_format)

            sheet.set_column('A:C', 15)   # Name, Realm, Class
            sheet.set_column('D:E', 11)   # Raid Kills, Raid Vault
            sheet.set_column('F:F', 45)   # Kill Details
            sheet.set_column('G:H', 16)   # M+ count, Dungeon Vault
            sheet.set_column('I:L', 8)    # Week history
            sheet.set_column('M:M', 26)   # Updated

        print(f"Excel report saved to {filename}")
        return filename

    def generate_all_reports(self):
        """Generate all report formats and return their filenames"""
        reports = {}

        try:
            reports['csv'] = self.generate_csv_report()
        except OSError as e:
            print(f"Error generating CSV report: {str(e)}")
            reports['csv'] = None

        try:
            reports['excel'] = self.generate_excel_report()
        except (OSError, ValueError) as e:
            print(f"Error generating Excel report: {str(e)}")
            reports['excel'] = None

        return reports
